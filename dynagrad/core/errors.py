# dynagrad/core/errors.py
"""
Error taxonomy of the engine.

All errors subclass the builtin that callers would naturally catch
(ValueError / TypeError / KeyError), so code written against plain builtins
keeps working.
"""


class DynagradError(Exception):
    """Base class of every engine error."""


class MissingValueError(DynagradError, ValueError):
    """A value-holding node (Leaf/Const/Zero/One) was evaluated with no stored value."""


class UnsupportedTypeError(DynagradError, TypeError):
    """An arithmetic rule was invoked on a ScalarValue kind pair it does not define."""


class MissingAdjointError(DynagradError, KeyError):
    """No adjoint is available: key absent from a rev() result, or apply_rev() before rev()."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else "adjoint missing"


class DroppedAdjointWarning(UserWarning):
    """The breadth-first reverse schedule discarded a contribution to a finalized node."""
