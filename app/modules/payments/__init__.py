# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/__init__.py

Cobro de paquetes vía Asaas y conciliación de webhooks con el ledger.

Autor: MeuPersonal
Fecha: 2026-10-19
"""
