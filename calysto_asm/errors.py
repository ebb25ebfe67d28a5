"""
Error kinds raised while assembling or running a program.

All of them derive from ValueError, so callers that only care about
"the program was bad" can keep catching that.
"""

class InterpreterError(ValueError):
    """
    Base error. `value` is the offending token (if any) and `line`
    the 1-based source line, filled in once it is known.
    """
    message = "interpreter error"

    def __init__(self, value=None, line=None):
        self.value = value
        self.line = line
        super(InterpreterError, self).__init__(self.describe())

    def describe(self):
        text = self.message
        if self.value is not None:
            text += ': "%s"' % (self.value,)
        if self.line is not None:
            text += ", line #%s" % self.line
        return text

    def at_line(self, line):
        """Attach a source line, unless one is already known."""
        if self.line is None and line is not None:
            self.line = line
            self.args = (self.describe(),)
        return self

class UnknownInstruction(InterpreterError):
    message = "Unknown instruction"

class InvalidArgumentCount(InterpreterError):
    message = "Invalid number of arguments"

class FirstArgumentNotRegister(InterpreterError):
    message = "First argument should be a register"

class UnresolvableOperand(InterpreterError):
    message = "Invalid argument"

class UnknownLabel(InterpreterError):
    message = "Can not find subroutine"

class EmptyCallStackOnReturn(InterpreterError):
    message = "Return with an empty call stack"

class InvalidMessageOperand(InterpreterError):
    message = "Invalid msg argument"

class DivisionByZero(InterpreterError):
    message = "Division by zero"

class StepLimitExceeded(InterpreterError):
    message = "Step limit exceeded"
