"""ikvmbuild - builds a .NET DLL from Java byte-code archives via IKVM.

Takes an already-resolved dependency list, assembles a single ``ikvmc``
invocation, runs it and publishes the resulting assembly.
"""

__version__ = "0.1.0"
