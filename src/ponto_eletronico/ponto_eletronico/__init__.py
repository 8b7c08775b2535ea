"""Ponto Eletrônico package.

This package is organized by feature modules (employees, time_records,
timesheet, payroll, reports) with a thin Flask controller layer and
service/repository layers.
"""
