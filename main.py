from rich.pretty import pprint

from argtree import *

app = program(
    "app",
    description="Demo application",
    global_flags={"verbose": boolean().aliases("v")},
)

greet = app.create(
    "greet",
    arguments=(Argument("name", string()),),
    flags={"times": number().min(1).to_integer().default(1)},
)


@greet.on
def callback(bound):
    if bound.flags.get("verbose"):
        pprint(bound)
    for _ in range(bound.flags["times"]):
        print(f"Hello, {bound.args[0]}!")


if __name__ == '__main__':
    app.start()
