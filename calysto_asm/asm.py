"""
Interpreter for a small register assembly language:

    mov   a, 5          ; registers are lowercase names
    call  show
    end
show:
    msg   'a = ', a
    ret

Labels are indexes into one flat instruction list; jumps and calls
move the instruction pointer (IP), `call` pushes the index of the
next instruction.
"""

from collections import namedtuple
import sys

from .errors import (InterpreterError, UnknownInstruction,
                     InvalidArgumentCount, FirstArgumentNotRegister,
                     UnresolvableOperand, UnknownLabel,
                     EmptyCallStackOnReturn, InvalidMessageOperand,
                     DivisionByZero, StepLimitExceeded)

MNEMONICS = ("mov", "inc", "dec", "add", "sub", "mul", "div", "jmp",
             "cmp", "jne", "je", "jge", "jg", "jle", "jl", "call", "ret",
             "msg", "end")

DEFAULT_OUTPUT = "-1"
ABORTED = "Run aborted by an error; use %exe or %reset to start again\n"

Instruction = namedtuple("Instruction", "kind args line")
Program = namedtuple("Program", "instructions labels")
Result = namedtuple("Result", "output error")

def is_composed_of(s, letters):
    return len(s) > 0 and sum([s.count(letter) for letter in letters]) == len(s)

def is_register(s):
    return is_composed_of(s, "abcdefghijklmnopqrstuvwxyz")

def is_const(s):
    """ Matches -?(0|[1-9][0-9]*) """
    digits = s[1:] if s.startswith("-") else s
    if digits == "0":
        return True
    return digits[:1] in "123456789" and is_composed_of(digits, "0123456789")

def is_quoted(s):
    return s.startswith("'")

def truncate_div(a, b):
    """ Integer division rounding toward zero """
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q

def strip_comment(line):
    return line.split(";", 1)[0].strip()

def make_label(word):
    return word[:-1]

def is_label(word):
    return len(word) > 1 and word.endswith(":")

def split_args(text):
    """ Whitespace separated words, one trailing comma dropped """
    return [word[:-1] if word.endswith(",") else word
            for word in text.split()]

def split_msg_args(text):
    """
    Split msg operands on commas that are not inside '...'. Quotes
    stay on the operand; the formatter removes them.
    """
    args = []
    arg = ""
    inside_quote = False
    for c in text:
        if c == " " and not arg:
            continue
        if c == "'":
            inside_quote = not inside_quote
        elif c == "," and not inside_quote:
            args.append(arg)
            arg = ""
            continue
        arg += c
    if arg:
        args.append(arg)
    return args

def parse(code):
    """
    Turn source text into a Program. Only unknown mnemonics are
    rejected here; everything else is checked when it runs.
    """
    instructions = []
    labels = {}
    for line_count, line in enumerate(code.splitlines(), 1):
        line = strip_comment(line)
        if not line:
            continue
        words = line.split(None, 1)
        found = words[0]
        rest = words[1] if len(words) > 1 else ""
        if is_label(found):
            labels[make_label(found)] = len(instructions)
            continue
        if found not in MNEMONICS:
            raise UnknownInstruction(found, line_count)
        if found == "msg":
            args = split_msg_args(rest)
        else:
            args = split_args(rest)
        instructions.append(Instruction(found, tuple(args), line_count))
    return Program(tuple(instructions), labels)

def format_instruction(instruction):
    if instruction.args:
        return "%-4s %s" % (instruction.kind, ", ".join(instruction.args))
    return instruction.kind

class Interpreter(object):
    """
    Runs a parsed Program. One instance owns the registers, the
    comparison flag, the call stack and the output of a run.
    """
    # branch conditions on the comparison flag
    conditions = {
        "jne": lambda flag: flag != 0,
        "je":  lambda flag: flag == 0,
        "jge": lambda flag: flag >= 0,
        "jg":  lambda flag: flag > 0,
        "jle": lambda flag: flag <= 0,
        "jl":  lambda flag: flag < 0,
    }

    def __init__(self, kernel=None, debug=False, max_steps=None):
        self.kernel = kernel
        self.debug = debug
        self.max_steps = max_steps
        self.breakpoints = set()
        self.apply = {
            "mov": self.MOV,
            "inc": self.INC,
            "dec": self.DEC,
            "add": self.ADD,
            "sub": self.SUB,
            "mul": self.MUL,
            "div": self.DIV,
            "jmp": self.JMP,
            "cmp": self.CMP,
            "jne": self.branch,
            "je": self.branch,
            "jge": self.branch,
            "jg": self.branch,
            "jle": self.branch,
            "jl": self.branch,
            "call": self.CALL,
            "ret": self.RET,
            "msg": self.MSG,
            "end": self.END,
        }
        self.initialize()

    def initialize(self):
        self.filename = ""
        self.program = Program((), {})
        self.reset()

    def reset(self):
        """ Clear run state; keeps the assembled program """
        self.register = {}
        self.flag = 0
        self.call_stack = []
        self.message = ()
        self.output = DEFAULT_OUTPUT
        self.ip = 0
        self.cont = True
        self.finished = False
        self.failed = False
        self.suspended = False
        self.instruction_count = 0

    #### State access; writes are traced when debug is on

    def get_register(self, name):
        return self.register.get(name, 0)

    def set_register(self, name, value):
        self.register[name] = value
        if self.debug:
            self.Print("    %s <= %s" % (name, value))

    def set_flag(self, value):
        self.flag = value
        if self.debug:
            self.Print("    FLAG <= %s" % value)

    def set_ip(self, value):
        self.ip = value
        if self.debug:
            self.Print("    IP <= %s" % value)

    def resolve(self, word):
        if is_register(word):
            return self.get_register(word)
        elif is_const(word):
            return int(word)
        raise UnresolvableOperand(word)

    def find_label(self, name):
        try:
            return self.program.labels[name]
        except KeyError:
            raise UnknownLabel(name)

    def check_args(self, instruction, count, register=False):
        if len(instruction.args) != count:
            raise InvalidArgumentCount(len(instruction.args))
        if register and not is_register(instruction.args[0]):
            raise FirstArgumentNotRegister(instruction.args[0])

    def format_message(self, pattern):
        parts = []
        for arg in pattern:
            if is_quoted(arg):
                parts.append(arg[1:-1])
            elif is_register(arg):
                parts.append(str(self.get_register(arg)))
            else:
                raise InvalidMessageOperand(arg)
        return "".join(parts)

    def halt(self):
        self.cont = False
        self.finished = True

    def abort(self):
        """ A fatal error ends the run; only a reset starts it again """
        self.failed = True
        self.halt()

    #### Instructions

    def MOV(self, instruction):
        self.check_args(instruction, 2, register=True)
        dst, src = instruction.args
        self.set_register(dst, self.resolve(src))

    def INC(self, instruction):
        self.check_args(instruction, 1, register=True)
        dst = instruction.args[0]
        self.set_register(dst, self.get_register(dst) + 1)

    def DEC(self, instruction):
        self.check_args(instruction, 1, register=True)
        dst = instruction.args[0]
        self.set_register(dst, self.get_register(dst) - 1)

    def ADD(self, instruction):
        self.check_args(instruction, 2, register=True)
        dst, src = instruction.args
        self.set_register(dst, self.get_register(dst) + self.resolve(src))

    def SUB(self, instruction):
        self.check_args(instruction, 2, register=True)
        dst, src = instruction.args
        self.set_register(dst, self.get_register(dst) - self.resolve(src))

    def MUL(self, instruction):
        self.check_args(instruction, 2, register=True)
        dst, src = instruction.args
        self.set_register(dst, self.get_register(dst) * self.resolve(src))

    def DIV(self, instruction):
        self.check_args(instruction, 2, register=True)
        dst, src = instruction.args
        divisor = self.resolve(src)
        if divisor == 0:
            raise DivisionByZero(src)
        self.set_register(dst, truncate_div(self.get_register(dst), divisor))

    def JMP(self, instruction):
        self.check_args(instruction, 1)
        self.set_ip(self.find_label(instruction.args[0]))

    def CMP(self, instruction):
        self.check_args(instruction, 2)
        left, right = instruction.args
        self.set_flag(self.resolve(left) - self.resolve(right))

    def branch(self, instruction):
        self.check_args(instruction, 1)
        if self.conditions[instruction.kind](self.flag):
            self.set_ip(self.find_label(instruction.args[0]))

    def CALL(self, instruction):
        self.check_args(instruction, 1)
        target = self.find_label(instruction.args[0])
        self.call_stack.append(self.ip)
        self.set_ip(target)

    def RET(self, instruction):
        if not self.call_stack:
            raise EmptyCallStackOnReturn()
        self.set_ip(self.call_stack.pop())

    def MSG(self, instruction):
        self.message = instruction.args

    def END(self, instruction):
        if self.message:
            self.output = self.format_message(self.message)
        self.call_stack = []
        self.halt()

    #### Running

    def assemble(self, code):
        self.program = parse(code)
        self.reset()
        return self.program

    def run(self, reset=True):
        if reset:
            self.reset()
        self.cont = not self.finished
        self.suspended = False
        if self.debug:
            self.Print("Tracing Script! IP* is the incremented instruction pointer")
            self.Print("(Count) INSTR [source line] (IP*: index)")
            self.Print("----------------------------------------------------")
        while self.cont:
            self.step()
            if self.cont and self.ip in self.breakpoints:
                self.cont = False
                self.suspended = True
                self.Print("...breakpoint hit at", self.ip)
        return self.output

    def step(self):
        instructions = self.program.instructions
        if self.finished:
            return
        if self.ip >= len(instructions):
            self.halt()
            return
        instruction = instructions[self.ip]
        if self.max_steps is not None and self.instruction_count >= self.max_steps:
            self.abort()
            raise StepLimitExceeded(self.max_steps, instruction.line)
        self.instruction_count += 1
        self.ip += 1
        if self.debug:
            self.Print("(%s) %s [line %s] (IP*: %s)" % (
                self.instruction_count,
                format_instruction(instruction),
                instruction.line,
                self.ip))
        try:
            self.apply[instruction.kind](instruction)
        except InterpreterError as exc:
            self.abort()
            exc.at_line(instruction.line)
            raise

    #### Output

    def Print(self, *args, end="\n"):
        if self.kernel:
            self.kernel.Print(*args, end=end)
        else:
            print(*args, end=end)

    def Error(self, string):
        if self.kernel:
            self.kernel.Error(string)
        else:
            sys.stderr.write(string)

    def labels_at(self, location):
        return sorted(label for label, index in self.program.labels.items()
                      if index == location)

    def lookup(self, location, default=None):
        labels = self.labels_at(location)
        if labels:
            return labels[0]
        if default is None:
            return location
        return default

    def dump_registers(self):
        self.Print()
        self.Print("=" * 60)
        self.Print("Registers:")
        self.Print("=" * 60)
        self.Print("IP: %s FLAG: %s" % (self.ip, self.flag))
        self.Print("Call stack:", " ".join(str(i) for i in self.call_stack) or "empty")
        count = 1
        for name in sorted(self.register):
            self.Print("%s: %s" % (name, self.register[name]), end=" ")
            if count % 4 == 0:
                self.Print()
            count += 1
        self.Print()

    def dump(self, start=None, stop=None, header=True):
        instructions = self.program.instructions
        start = 0 if start is None else start
        stop = len(instructions) if stop is None else min(stop + 1, len(instructions))
        if header:
            self.Print("=" * 60)
            self.Print("Program listing:")
            self.Print("=" * 60)
        for index in range(start, stop):
            instruction = instructions[index]
            for label in self.labels_at(index)[:-1]:
                self.Print(label + ":")
            label = self.lookup(index, "")
            if label:
                label = label + ":"
            self.Print("%-10s %4d: %-40s [line: %s]" % (
                label, index, format_instruction(instruction), instruction.line))

    def disassemble(self):
        instructions = self.program.instructions
        for index in range(len(instructions) + 1):
            for label in self.labels_at(index):
                self.Print(label + ":")
            if index < len(instructions):
                self.Print("    %s" % format_instruction(instructions[index]))

    #### Files and the interactive front end

    def load(self, filename):
        self.filename = filename
        with open(filename) as fp:
            return fp.read()

    def execute_file(self, filename):
        text = self.load(filename)
        self.assemble(text)
        output = self.run()
        self.Print(output)
        self.Print("Instructions:", self.instruction_count)
        return output

    def report(self):
        if self.suspended:
            self.Print("=" * 60)
            self.Print("Computation SUSPENDED")
            self.Print("=" * 60)
        else:
            self.Print("=" * 60)
            self.Print("Computation completed")
            self.Print("=" * 60)
            self.Print("Output:", self.output)
        self.Print("Instructions:", self.instruction_count)

    def runtime_error(self, exc):
        self.Error("\nRuntime error:\n    line %s:\n%s\n" % (exc.line, exc))

    def execute(self, text):
        words = text.split()
        if not words:
            return True
        if words[0].startswith("%"):
            if words[0] == "%regs":
                self.dump_registers()
                return True
            elif words[0] == "%dis":
                try:
                    self.dump(*[int(word) for word in words[1:3]])
                except ValueError:
                    self.Error("Usage: %dis [START [STOP]]")
                    return False
                return True
            elif words[0] == "%labels":
                self.Print("Label", "Index")
                for label in sorted(self.program.labels):
                    self.Print(label + ":", self.program.labels[label])
                return True
            elif words[0] == "%d":
                self.debug = not self.debug
                self.Print("Debug is now %s" % ["off", "on"][int(self.debug)])
                return True
            elif words[0] == "%limit":
                if len(words) > 1:
                    if words[1] == "off":
                        self.max_steps = None
                    else:
                        try:
                            self.max_steps = int(words[1])
                        except ValueError:
                            self.Error("Usage: %limit [STEPS | off]")
                            return False
                self.Print("Step limit is %s" % ("off" if self.max_steps is None else self.max_steps))
                return True
            elif words[0] == "%reset":
                self.reset()
                self.dump_registers()
                return True
            elif words[0] == "%step":
                if self.failed:
                    self.Error(ABORTED)
                    return False
                if self.finished:
                    self.report()
                    return True
                orig_debug = self.debug
                self.debug = True
                try:
                    self.step()
                except InterpreterError as exc:
                    self.runtime_error(exc)
                    return False
                finally:
                    self.debug = orig_debug
                if self.finished:
                    self.report()
                self.dump_registers()
                return True
            elif words[0] == "%bp":
                if len(words) > 1:
                    if words[1] == "clear":
                        self.breakpoints = set()
                        self.Print("All breakpoints cleared")
                        return True
                    if words[1] in self.program.labels:
                        self.breakpoints.add(self.program.labels[words[1]])
                    elif words[1].isdigit():
                        self.breakpoints.add(int(words[1]))
                    else:
                        self.Error("Unknown label or index: %s" % words[1])
                        return False
                if self.breakpoints:
                    count = 1
                    self.Print("=" * 60)
                    self.Print("Breakpoints")
                    self.Print("=" * 60)
                    for index in sorted(self.breakpoints):
                        self.Print("    %d) " % count, end="")
                        if index < len(self.program.instructions):
                            self.dump(index, index, header=False)
                        else:
                            self.Print(index)
                        count += 1
                else:
                    self.Print("    No breakpoints set")
                return True
            elif words[0] == "%exe" or words[0] == "%cont":
                if words[0] == "%cont" and self.failed:
                    self.Error(ABORTED)
                    return False
                try:
                    self.run(reset=(words[0] == "%exe"))
                except InterpreterError as exc:
                    self.runtime_error(exc)
                    return False
                self.report()
                return True
            else:
                self.Error("Invalid Interactive Magic Directive\nHint: %help")
                return False
        else:
            ### Else, must be code to assemble:
            try:
                self.assemble(text)
            except InterpreterError as exc:
                self.Error("\nAssemble error\n%s\n" % exc)
                return False
            self.Print("Assembled! Use %dis to examine; use %exe to run.")
            return True

def interpret(program, max_steps=None):
    """
    Assemble and run `program` on a fresh interpreter; return the
    output string ("-1" unless `end` runs after a `msg`). Raises an
    InterpreterError subclass on a fatal error.
    """
    interpreter = Interpreter(max_steps=max_steps)
    interpreter.assemble(program)
    return interpreter.run()

def try_interpret(program, max_steps=None):
    """ Like interpret(), but the error kind is returned in a Result """
    try:
        return Result(interpret(program, max_steps=max_steps), None)
    except InterpreterError as exc:
        return Result(None, exc)
