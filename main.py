import sys

from rich.console import Console
from rich.pretty import pprint

from switchyard import *

port = IntegerHandler(6379, validator=lambda x: 0 < x < 65536)
memory = SizeHandler(1024 * 1024 * 1024)
threads = IntegerHandler(4, validator=lambda x: x > 0)
verbose = FlagHandler()
label = StringHandler("init")
mode = ChoiceHandler("init", ("value",))

arguments = Arguments("server", [
    Switch("port", "p", "port", port),
    Switch("max memory", "m", handler=memory),
    Switch("threads", "t", handler=threads),
    Switch("verbose", "v", handler=verbose),
    Switch("string", ext_switch="ss", handler=label),
    Switch("mode", "e", handler=mode),
], ["arg1", "arg2"], colorful=True)


if __name__ == '__main__':
    try:
        arguments.build()
    except InvalidInputError as fault:
        Console(stderr=True).print(fault)
        arguments.usage()
        sys.exit(1)
    pprint(arguments)
    pprint([port, memory, threads, verbose, label, mode])
