from flask import Blueprint, current_app, jsonify, request, send_from_directory

main = Blueprint('main', __name__)


@main.after_app_request
def log_request(response):
    current_app.logger.info(f"{request.method} {request.path} {response.status_code}")
    return response


@main.route('/')
def index():
    return send_from_directory(current_app.static_folder, 'index.html')


@main.route('/api/status')
def status():
    return jsonify({'status': 'ok', 'message': 'Server is running'})


@main.route('/api/state')
def game_state():
    """Current round and roster, for debugging and late-loading clients."""
    return jsonify(current_app.extensions['session_manager'].snapshot())
