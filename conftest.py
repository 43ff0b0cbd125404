"""
Root conftest. It holds no fixtures: because pytest imports a rootdir
conftest in prepend mode, its directory (the project root) is inserted on
sys.path, which lets tests import main.py.
"""
