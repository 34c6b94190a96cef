class HavnesjefException(Exception):
    pass


class InvalidTeamNameException(HavnesjefException):
    pass


class TokenIssuanceException(HavnesjefException):
    pass


class DeadlineExceededException(HavnesjefException):
    pass
