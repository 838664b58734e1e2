# -*- coding: utf-8 -*-
"""
backend/app/modules/bookings/__init__.py

Proyección de lectura de reservas (usada por la reconciliación del ledger).

Autor: MeuPersonal
Fecha: 2026-10-19
"""

from .enums import BookingStatus
from .models import Booking
from .repositories import BookingRepository

__all__ = ["BookingStatus", "Booking", "BookingRepository"]
