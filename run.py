from nutriapp import create_app, socketio

# This is the entry point for the application.
# socketio.run serves both the HTTP routes and the WebSocket endpoint.
app = create_app()

if __name__ == '__main__':
    # This condition ensures that the app runs only when this script is executed directly.
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'], allow_unsafe_werkzeug=True)
