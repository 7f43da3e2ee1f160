class ReviewbotError(Exception):
    pass


class UserNotFound(ReviewbotError):
    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"user not found: {detail}" if detail else "user not found")


class DirectoryFetchFailed(ReviewbotError):
    """Slack directory could not be fetched. The transport error is the ``__cause__``."""


class ProfileValidationError(ReviewbotError):
    pass


class UnsafeDeletion(ReviewbotError):
    def __init__(self) -> None:
        super().__init__(
            "unsafe deletion process. if you want to delete all, enable the --all flag"
        )


def is_user_not_found(exc: BaseException | None) -> bool:
    while exc is not None:
        if isinstance(exc, UserNotFound):
            return True
        exc = exc.__cause__
    return False
