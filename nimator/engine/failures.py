"""Failure flattening — turns raised errors into a readable, indented message.

Exceptions are first converted to a plain ``Failure`` tree (message plus
child causes) so the formatting below does not depend on how an error was
raised or chained.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Failure:
    """A failure message and the failures that caused it.

    ``grouped`` marks a multi-cause failure (an exception group) whose
    ``causes`` happened side by side rather than as a chain.
    """

    message: str
    causes: tuple[Failure, ...] = ()
    grouped: bool = False

    @classmethod
    def from_exception(cls, exc: BaseException) -> Failure:
        return _from_exception(exc, frozenset())


def _message_of(exc: BaseException) -> str:
    if isinstance(exc, BaseExceptionGroup):
        text = exc.message
    else:
        text = str(exc)
    return text or f"{type(exc).__name__} was raised."


def _next_in_chain(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__context__ is not None and not exc.__suppress_context__:
        return exc.__context__
    return None


def _from_exception(exc: BaseException, seen: frozenset[int]) -> Failure:
    seen = seen | {id(exc)}

    if isinstance(exc, BaseExceptionGroup):
        children = tuple(_from_exception(e, seen) for e in exc.exceptions)
        return Failure(_message_of(exc), children, grouped=True)

    inner = _next_in_chain(exc)
    if inner is None or id(inner) in seen:
        return Failure(_message_of(exc))
    return Failure(_message_of(exc), (_from_exception(inner, seen),))


def flatten_failure(failure: Failure, depth: int = 0) -> str:
    """Render ``failure`` as text, one message per line.

    A chain is walked depth first, each cause indented one tab deeper than
    the failure it caused. A grouped failure lists each of its direct causes
    one tab in, without descending into their own causes.
    """
    indent = "\t" * depth

    if failure.grouped:
        return "".join(f"{indent}\t{cause.message}\n" for cause in failure.causes)

    text = f"{indent}{failure.message}\n"
    for cause in failure.causes:
        text += flatten_failure(cause, depth + 1)
    return text


def describe_exception(exc: BaseException) -> str:
    """Flattened message of ``exc`` and everything it was chained to."""
    return flatten_failure(Failure.from_exception(exc))
