from .app import create_app
from .dependencies import Services, build_services, get_services

__all__ = ["Services", "build_services", "create_app", "get_services"]
