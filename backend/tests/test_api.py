def test_index_greeting(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json() == {'message': 'Hello world!'}


def test_unknown_route_is_json_404(client):
    res = client.get('/api/nothing-here')
    assert res.status_code == 404
    assert res.get_json() == {'message': 'Not found'}


def test_unhandled_error_is_json_500(flask_app):
    @flask_app.route('/boom')
    def boom():
        raise RuntimeError('kaboom')

    res = flask_app.test_client().get('/boom')
    assert res.status_code == 500
    assert res.get_json() == {'message': 'Something went wrong', 'error': 'kaboom'}


def test_method_not_allowed_passes_through(client):
    res = client.post('/')
    assert res.status_code == 405


def test_catalog_command_lists_themes(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['catalog'])
    assert result.exit_code == 0
    assert 'Classics (2 movies)' in result.output
    assert '  1: Vertigo' in result.output


def test_catalog_command_reports_failure(flask_app, monkeypatch):
    from moviequiz import catalog
    from conftest import CountingCatalog
    monkeypatch.setattr(catalog, 'backend', CountingCatalog(fail_themes=True))
    result = flask_app.test_cli_runner().invoke(args=['catalog'])
    assert result.exit_code != 0
    assert 'media service down' in result.output
