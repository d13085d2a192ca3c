from typing import TypeVar

from returns.io import IOFailure, IOResultE, IOSuccess
from returns.result import Failure, ResultE, Success

T = TypeVar("T")


def unwrap_or_raise(result: IOResultE[T] | ResultE[T]) -> T:
    """
    Leave the railway: return the success value or re-raise the captured exception.

    The failure has already been logged by the function that produced the container.
    """
    match result:
        case IOSuccess(Success(value)) | Success(value):
            return value
        case IOFailure(Failure(error)) | Failure(error) if isinstance(error, Exception):
            raise error
        case _:
            raise RuntimeError(f"Unexpected railway result: {result!r}")
