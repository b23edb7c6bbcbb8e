"""
Excel import/export (openpyxl). Customers can be imported; customers and
tasks can be exported with a chosen set of columns.
"""
