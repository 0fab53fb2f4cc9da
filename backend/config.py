import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    PORT = int(os.environ.get('PORT', '3000'))
    CORS_ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('CORS_ALLOWED_ORIGINS', '*').split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Grace period between end_game and room teardown (seconds)
    SESSION_TEARDOWN_DELAY_SEC = float(os.environ.get('SESSION_TEARDOWN_DELAY_SEC', '5'))
    # Points credited to the answering player on a confirmed answer
    CORRECT_ANSWER_POINTS = int(os.environ.get('CORRECT_ANSWER_POINTS', '1'))
    # Media catalog: 'cloudinary' or 'static'
    MEDIA_CATALOG_BACKEND = os.environ.get('MEDIA_CATALOG_BACKEND', 'cloudinary')
    MEDIA_CATALOG_ROOT = os.environ.get('MEDIA_CATALOG_ROOT', 'movie-quiz/themes')
    MEDIA_CATALOG_STATIC = {}
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME', '')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY', '')
    CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET', '')
