# -*- coding: utf-8 -*-
"""
backend/app/modules/bookings/enums.py

Estado canónico de una reserva (booking).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from enum import Enum


class BookingStatus(str, Enum):
    """Estado canónico de la reserva."""
    RESERVED = "RESERVED"  # Creada, esperando pago/confirmación
    PAID = "PAID"          # Activa y pagada
    CANCELED = "CANCELED"
    DONE = "DONE"          # Aula concluida


__all__ = ["BookingStatus"]
