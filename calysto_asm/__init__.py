from ._version import __version__
from .asm import Interpreter, Program, Instruction, Result, parse, interpret, try_interpret
from .errors import *
