"""tracedap debug adapter: ``python -m tracedap``.

Speaks the Debug Adapter Protocol on stdin/stdout by default, or on a single
TCP connection with ``--tcp PORT``::

    python -m tracedap
    python -m tracedap --tcp 4711 --trace-log dap.log
"""

from tracedap.cli import main

if __name__ == "__main__":
    main()
