# Initialize the app package
from .main import create_app

# Export commonly used classes
__all__ = ['create_app']
