"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las peticiones tipadas y la taxonomía de errores.
- El dominio no conoce procesos, HTTP ni CLI: solo conceptos del problema.
"""
