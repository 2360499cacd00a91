from .product_client import ProductClient, PersistenceError
