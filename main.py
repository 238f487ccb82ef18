"""Run the XeCare client command line from a source checkout."""

from xecare.interfaces.cli import main


if __name__ == "__main__":
    main()
