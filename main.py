import sys

from rich.pretty import pprint

from tabwise import *

model = Model("deploy", descr="ship builds to environments")

model.group(0, Group(
    "general",
    options=[
        Option("-v", "--verbose", descr="print more"),
        Option("-c", "--config", arity="single", descr="configuration file", complete="files,*.toml"),
    ],
    persistent=True,
))
model.group(0, Group(
    "database",
    options=[
        Option("--host", arity="single", descr="database host", choices=("localhost", "db.internal")),
        Option("--port", arity="single", descr="database port"),
    ],
    namespace="db",
    delimiter=".",
))

push = model.command("push", descr="push a build")
model.group(push, Group("push", options=[
    Option("-t", "--tags", arity="multi", descr="tags to attach", choices=("latest", "stable", "canary")),
    Option("-f", "--force", descr="overwrite an existing build"),
]))
model.slot(push, Slot("ENVIRONMENT", 1, 1, choices=("staging", "production")))
model.slot(push, Slot("ARTIFACTS", 0, -1, complete="files"))

model.command("rollback", aliases=("rb",), descr="restore the previous build")
model.command("secrets", descr="manage secrets", namespaced=True)
model.command("rotate", parent=model.find(0, "secrets"), descr="rotate every secret")


if __name__ == '__main__':
    if sys.argv[1:2] == [REQUEST_COMMAND]:
        sys.exit(run(model))
    pprint(model.root)
