from hajzi.core.security.jwt_handler import JWTManager, get_jwt_manager

__all__ = ["JWTManager", "get_jwt_manager"]
