"""Site controllers, addressable by ``/module/controller/action``.

Each sub-package is a module; each of its modules holds one
``<Name>Controller`` whose ``<name>_action`` methods are actions.
"""
