# -*- coding: utf-8 -*-
"""
backend/app/modules/__init__.py

Módulos de dominio: tenants, bookings (modelo de lectura), ledger,
notifications y payments.
"""
