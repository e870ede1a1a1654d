"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite sustituir el lanzamiento de procesos en tests (contador de spawns).
"""
