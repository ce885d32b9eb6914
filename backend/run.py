from league import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server so dashboards get live score updates in dev
    socketio.run(app, debug=True)
