# -*- coding: utf-8 -*-
"""
backend/app/modules/ledger/__init__.py

Ledger de créditos de alumno y horas de profesor.

Submódulos:
- models / repositories: saldos y sus movimientos append-only
- services: mutaciones con lock de fila y eventos
- facades: grant manual con auditoría
- jobs: liberación de bloqueos vencidos y reconciliación

Autor: MeuPersonal
Fecha: 2026-10-19
"""
