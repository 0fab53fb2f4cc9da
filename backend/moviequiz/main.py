from flask import Blueprint, current_app, jsonify
from werkzeug.exceptions import HTTPException

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Hello world!'})


@main.app_errorhandler(404)
def not_found(error):
    return jsonify({'message': 'Not found'}), 404


@main.app_errorhandler(Exception)
def internal_error(error):
    if isinstance(error, HTTPException):
        return error
    current_app.logger.exception(f"[http-error] {error}")
    return jsonify({'message': 'Something went wrong', 'error': str(error)}), 500
