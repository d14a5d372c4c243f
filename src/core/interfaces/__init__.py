"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- El Core depende de abstracciones, nunca del proveedor del catálogo.
"""
