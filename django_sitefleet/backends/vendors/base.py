class StoreVendor:
    """
    Vendor specific store operations.

    One subclass per Django database vendor (``connection.vendor``). Besides
    creating and dropping physical stores, a vendor answers the question the
    schema synchronizer asks after every failed unit: was this error only the
    database saying the change is already there?

    Attributes:
        vendor (str): Django vendor name the class handles
        db_config (dict): Resolved connection settings for the store's server
    """

    vendor = None

    def __init__(self, db_config):
        self.db_config = db_config

    @classmethod
    def database_name(cls, store_name) -> str:
        return store_name

    def exists(self, store_name) -> bool:
        raise NotImplementedError

    def create(self, store_name):
        raise NotImplementedError

    def drop(self, store_name):
        raise NotImplementedError

    def is_benign_already_applied_error(self, exc) -> bool:
        raise NotImplementedError

    @staticmethod
    def driver_error(exc):
        # django.db.utils wraps driver errors and chains the original.
        return exc.__cause__ or exc
