"""
Decorator to deal with the very annoying and grossly incomplete
ComponentResource boilerplate.
"""

import pulumi


class Component(pulumi.ComponentResource):
    __namespace__ = None
    __outputs__ = ()

    def __init__(self, __name__, *pargs, opts=None, **kwargs):
        super().__init__(self.__namespace__, __name__, None, opts)
        outs = self.set_up(__name__, *pargs, __opts__=opts, **kwargs)
        if outs is None:
            outs = {}
        missing = set(self.__outputs__) - set(outs)
        if missing:
            raise TypeError(
                f"{type(self).__name__} did not produce outputs: {', '.join(sorted(missing))}"
            )
        self.register_outputs(outs)
        vars(self).update(outs)

    def set_up(self, *pargs, **kwargs):
        pass


def component(namespace=None, outputs=()):
    """
    Makes the given callable a component, with much less boilerplate.

    If no namespace is given, uses the module and function names

    @component('pkg:MyResource')
    def MyResource(self, name, ..., __opts__):
        ...
        return {...outputs}
    """
    def _(func):
        nonlocal namespace
        if namespace is None:
            namespace = f"{func.__module__.replace('.', ':')}:{func.__name__}"

        klass = type(func.__name__, (Component,), {
            '__doc__': func.__doc__,
            '__module__': func.__module__,
            '__qualname__': func.__qualname__,
            'set_up': func,
            '__namespace__': namespace,
            '__outputs__': tuple(outputs),
        })
        return klass

    return _
