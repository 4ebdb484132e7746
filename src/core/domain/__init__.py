"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (descriptores,
  resultados, tablas de referencia).
- El dominio no conoce httpx, asyncio ni la CLI: solo conceptos del problema.
"""
