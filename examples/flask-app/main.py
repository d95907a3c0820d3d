import sys

from flask import Flask
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from servicelog import new_logger, redirect_logging
from servicelog.metrics import request_metrics
from servicelog.middleware import current_logger, init_app


def create_app(sink=sys.stdout, registry=None):
    app = Flask(__name__)
    logger = new_logger(sink, 'flask-example', 'DEBUG', service_type='web')

    metrics = request_metrics(registry=registry) if registry is not None else request_metrics()
    init_app(app, logger, *metrics)

    # Flask and werkzeug messages go through the same logger
    redirect_logging(logger, name='werkzeug')

    @app.route('/')
    def index():
        current_logger().info("Index page accessed")
        return {'message': 'Hello from servicelog!'}

    @app.route('/health')
    def health():
        current_logger().debug("Health check")
        return {'status': 'healthy'}, 200

    @app.route('/metrics')
    def metrics_endpoint():
        if registry is not None:
            return generate_latest(registry), 200, {'Content-Type': CONTENT_TYPE_LATEST}
        return generate_latest(), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=8000)
