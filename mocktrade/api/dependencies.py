"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from mocktrade.engine.portfolio import Portfolio


def get_portfolio(request: Request) -> Portfolio:
    return request.app.state.portfolio
