class MoralisError(Exception):
    pass


class MoralisApiError(MoralisError):
    pass
