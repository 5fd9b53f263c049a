from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the Mancala game server!',
        'socketio_namespace': current_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
    })
