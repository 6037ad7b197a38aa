# SPDX-License-Identifier: MIT

from teamline.cleanup import register_cleanup
from teamline.initialize import initialize
from teamline.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
