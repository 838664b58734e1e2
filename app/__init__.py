# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Inicializador del paquete principal 'app' del backend MeuPersonal
(ledger de créditos/horas y conciliación de pagos).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

# Fin del archivo backend/app/__init__.py
