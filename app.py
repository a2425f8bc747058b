#!/usr/bin/env python
"""
Story Graph Explorer - Streamlit entrypoint.
"""

from storygraph.ui import render_app


def main() -> None:
    render_app()


if __name__ == "__main__":
    main()
