"""
Módulo Salidas - Salida de bultos del stock

Simétrico a Entradas: la salida resta del stock la cantidad de cada línea
del bulto y se rechaza si algún producto quedaría en negativo.
"""

from .router import router as exits_router

__all__ = [
    "exits_router"
]
