"""Query executors for different data sources.

Executor modules import their driver at module level, so they are loaded by
``QueryExecutorFactory`` only once the driver is known to be installed.
"""
