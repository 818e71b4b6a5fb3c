from flask import Blueprint

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Landing - the single-page client is served separately."""
    return {'app': 'Dinner Log', 'api': '/api'}


@main_bp.route('/health')
def health():
    """Health check endpoint for Railway."""
    return {'status': 'healthy', 'app': 'Dinner Log'}
