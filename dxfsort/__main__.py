"""
Module entry point for: python -m dxfsort

Allows running the sorter directly as a module:
    python -m dxfsort sort <pdf_path> [options]
    python -m dxfsort fragments <pdf_path> --page N
    python -m dxfsort index [--dxf-dir DIR]
    python -m dxfsort info <pdf_path>
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
