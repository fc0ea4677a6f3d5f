# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import typer

from licensefmt.commands import fmt

app = typer.Typer(
    name="licensefmt",
    help="Ensure license headers and consistent formatting in Python sources.",
    add_completion=False,
    pretty_exceptions_enable=False,  # Disable stack traces for users
)

# A single registered command makes the app run it directly:
# licensefmt [OPTIONS] [PATHS]...
app.command(name="fmt")(fmt.fmt)


def main():
    app()


if __name__ == "__main__":
    main()
