import json
import os
import sys

from jupyter_client.kernelspec import KernelSpecManager
from IPython.utils.tempdir import TemporaryDirectory

kernel_json = {
    "argv": [
        sys.executable,
        "-m", "calysto_asm",
        "-f", "{connection_file}"
    ],
    "display_name": "Calysto Asm",
    "language": "asm",
    "codemirror_mode": "nasm",
}

def install_my_kernel_spec(user=True, prefix=None):
    with TemporaryDirectory() as td:
        os.chmod(td, 0o755) # Starts off as 700, not user readable
        with open(os.path.join(td, 'kernel.json'), 'w') as f:
            json.dump(kernel_json, f, sort_keys=True)

        print('Installing Jupyter kernel spec')
        KernelSpecManager().install_kernel_spec(td, 'calysto_asm', user=user,
                                                prefix=prefix)

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    install_my_kernel_spec(user="--sys-prefix" not in argv,
                           prefix=sys.prefix if "--sys-prefix" in argv else None)

if __name__ == '__main__':
    main()
