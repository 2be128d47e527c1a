class BitqueryError(Exception):
    pass


class BitqueryAuthError(BitqueryError):
    pass


class BitqueryApiError(BitqueryError):
    pass
