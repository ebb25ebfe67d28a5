from metakernel import MetaKernel

from .asm import Interpreter, MNEMONICS
from ._version import __version__

MAGICS = ["%bp", "%cont", "%d", "%dis", "%exe", "%labels", "%limit",
          "%regs", "%reset", "%step"]

class CalystoAsm(MetaKernel):
    implementation = 'Calysto Asm'
    implementation_version = __version__
    language = 'asm'
    language_version = '0.1'
    banner = "Calysto Asm - a small register assembly language"
    language_info = {
        'name': 'gas',
        'mimetype': 'text/x-gas',
        'file_extension': '.asm',
    }
    max_steps = 1000000

    def __init__(self, *args, **kwargs):
        super(CalystoAsm, self).__init__(*args, **kwargs)
        self.asm = Interpreter(self, max_steps=self.max_steps)

    def get_usage(self):
        return """This is the Calysto Asm Jupyter kernel.

A cell without a directive is assembled; run it with %exe.

Interactive Magic Directives:

 %bp [clear | LABEL | INDEX]        - show, clear, or set breakpoints
 %cont                              - continue running
 %d                                 - toggle execution tracing
 %dis [START [STOP]]                - list the program
 %exe                               - execute the program
 %labels                            - show labels and their indexes
 %limit [STEPS | off]               - show or set the step limit
 %regs                              - show registers
 %reset                             - reset registers, flag and call stack
 %step                              - execute the next instruction

INDEX, START and STOP are instruction indexes as shown by %dis.

To get additional help on these items, use '%help %item'.
"""

    def get_completions(self, info):
        token = info["help_obj"]
        matches = []
        for item in (list(MNEMONICS) +
                     list(self.asm.program.labels.keys()) +
                     MAGICS):
            if item.startswith(token) and item not in matches:
                matches.append(item)
        return matches

    def get_kernel_help_on(self, info, level=0, none_on_fail=False):
        expr = info["code"]
        if expr == "%bp":
            return """%bp - See, clear, or set a breakpoint.
See all of the breakpoints:
    %bp

Clear all of the breakpoints:
    %bp clear

Stop before the instruction at label loop (or index 4):
    %bp loop
    %bp 4
"""
        elif expr == "%cont":
            return """%cont - Continue executing the program
"""
        elif expr == "%d":
            return """%d - Toggle tracing of each executed instruction
"""
        elif expr == "%dis":
            return """%dis - List the assembled program with labels and source lines
"""
        elif expr == "%exe":
            return """%exe - Execute the program from the start and show its output
"""
        elif expr == "%labels":
            return """%labels - Show labels and the instruction index they name
"""
        elif expr == "%limit":
            return """%limit - Show or set the maximum number of executed instructions
    %limit 5000
    %limit off
"""
        elif expr == "%regs":
            return """%regs - See the registers, flag, IP and call stack
"""
        elif expr == "%reset":
            return """%reset - Reset registers, flag, call stack and output
"""
        elif expr == "%step":
            return """%step - Execute the next instruction
"""
        elif none_on_fail:
            return None
        else:
            return "No available help on '%s'" % expr

    def do_execute_file(self, filename):
        self.asm.execute_file(filename)

    def do_execute_direct(self, code):
        try:
            self.asm.execute(code.rstrip())
        except Exception as exc:
            self.Error(str(exc))
        except KeyboardInterrupt:
            self.Error("Keyboard Interrupt!")

    def do_is_complete(self, code):
        # magics run at once; code runs after a blank line
        if code.strip().startswith("%"):
            return {'status' : 'complete'}
        elif code.strip() and code.split("\n")[-1].strip() == "":
            return {'status' : 'complete'}
        else:
            return {'status' : 'incomplete',
                    'indent': '    '}

    def repr(self, data):
        return repr(data)
