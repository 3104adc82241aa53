# src/planning_engine/financial_statements/__init__.py
"""
Financial Statements Module

Builds the income statement, balance sheet and cash flow statement of one
fiscal year and checks that they agree with each other.
"""

from .income_statement import IncomeStatement, build_income_statement, calculate_income_tax
from .balance_sheet import (
    AccountingEquation,
    BalanceSheet,
    CurrentAssets,
    CurrentLiabilities,
    Equity,
    NonCurrentAssets,
    build_balance_sheet,
    derive_cash_direct,
    working_capital_balances,
)
from .cash_flow import CashFlowStatement, build_cash_flow_statement
from .triangulation import TriangulationError, TriangulationResult, validate_triangulation
from .statement_builder import CarryForwardState, ThreeStatementModel, YearInputs, generate

__all__ = [
    'IncomeStatement',
    'build_income_statement',
    'calculate_income_tax',
    'AccountingEquation',
    'BalanceSheet',
    'CurrentAssets',
    'CurrentLiabilities',
    'Equity',
    'NonCurrentAssets',
    'build_balance_sheet',
    'derive_cash_direct',
    'working_capital_balances',
    'CashFlowStatement',
    'build_cash_flow_statement',
    'TriangulationError',
    'TriangulationResult',
    'validate_triangulation',
    'CarryForwardState',
    'ThreeStatementModel',
    'YearInputs',
    'generate',
]
