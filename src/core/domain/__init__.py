"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no conoce subprocess ni CLI: solo conceptos del problema (plataformas, etapas, defines).
"""
