class Error(Exception):
    pass


class InvalidSuperblockError(Error):
    pass


class ReadError(Error):
    pass
