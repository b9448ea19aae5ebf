"""
Bake Command-Line Interface
===========================

- bake: compile a Bake source file to Go
"""
