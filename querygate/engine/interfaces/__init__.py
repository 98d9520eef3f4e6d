from .query_executor_interface import QueryExecutorInterface, QueryExecutionResult

__all__ = ['QueryExecutorInterface', 'QueryExecutionResult']
