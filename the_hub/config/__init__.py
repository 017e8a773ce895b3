from .hub_config import HubConfig, STORE_MEMORY, STORE_MONGODB

__all__ = ["HubConfig", "STORE_MEMORY", "STORE_MONGODB"]
