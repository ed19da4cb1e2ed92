"""Command-line tools for the Gravity discovery engine.

- ``python -m src.cli.discover`` — run a discovery request, stream campaign
  ideas, invalidate or inspect cached results.

All CLI modules use argparse and defer heavy imports (vendor SDKs) until
the command actually runs.
"""
