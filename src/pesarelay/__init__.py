"""
PesaRelay - M-Pesa Daraja Relay

Features:
- OAuth client-credential token exchange
- STK Push (Lipa Na M-Pesa Online)
- C2B callback URL registration
- Payment notification webhook
"""

__version__ = "0.1.0"
