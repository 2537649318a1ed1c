from dishka import Provider as DishkaProvider

from heimdall.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for Heimdall providers. Dependencies default to the UOW scope."""

    scope = Scope.UOW
