# staking_indexer/core/container.py

from typing import TypeVar, Type, Callable, Set
import inspect

from .logging import IndexerLogger, log_with_context, DEBUG, INFO, ERROR

T = TypeVar('T')


class IndexerContainer:
    def __init__(self, config):
        self._config = config
        self._services = {}  # service_type -> (implementation, factory, is_singleton)
        self._instances = {}  # service_type -> instance (for singletons)
        self._resolution_stack: Set[Type] = set()

        self._logger = IndexerLogger.get_logger('core.container')
        self._logger.debug("IndexerContainer initialized")

    @property
    def config(self):
        return self._config

    def register_singleton(self, interface: Type[T], implementation: Type[T]) -> 'IndexerContainer':
        """Register a service that gets created once and reused"""
        log_with_context(self._logger, DEBUG, "Registering singleton service",
                         interface=interface.__name__,
                         implementation=implementation.__name__)

        self._services[interface] = (implementation, None, True)
        return self

    def register_factory(self, interface: Type[T], factory_func: Callable[['IndexerContainer'], T]) -> 'IndexerContainer':
        """Register a factory function (treated as singleton)"""
        log_with_context(self._logger, DEBUG, "Registering factory service",
                         interface=interface.__name__,
                         factory_func=factory_func.__name__)

        self._services[interface] = (None, factory_func, True)
        return self

    def register_instance(self, interface: Type[T], instance: T) -> 'IndexerContainer':
        """Register an already constructed singleton"""
        self._services[interface] = (type(instance), None, True)
        self._instances[interface] = instance
        return self

    def get(self, service_type: Type[T]) -> T:
        """Get service instance, creating if necessary"""
        service_name = service_type.__name__

        if service_type in self._resolution_stack:
            circular_path = " -> ".join([t.__name__ for t in self._resolution_stack]) + f" -> {service_name}"
            log_with_context(self._logger, ERROR, "Circular dependency detected",
                             service_type=service_name,
                             circular_path=circular_path)
            raise ValueError(f"Circular dependency detected: {circular_path}")

        if service_type not in self._services:
            log_with_context(self._logger, ERROR, "Service not registered",
                             service_type=service_name)
            raise ValueError(f"Service {service_name} not registered")

        implementation, factory, is_singleton = self._services[service_type]

        if is_singleton and service_type in self._instances:
            return self._instances[service_type]

        self._resolution_stack.add(service_type)

        try:
            if factory:
                instance = factory(self)
            else:
                instance = self._create_instance(implementation)

            if is_singleton:
                self._instances[service_type] = instance

            log_with_context(self._logger, DEBUG, "Service instance created",
                             service_type=service_name,
                             instance_type=type(instance).__name__)

            return instance

        except Exception as e:
            log_with_context(self._logger, ERROR, "Failed to create service instance",
                             service_type=service_name,
                             error=str(e),
                             exception_type=type(e).__name__)
            raise
        finally:
            self._resolution_stack.discard(service_type)

    def _create_instance(self, implementation_type: Type):
        """Create instance with dependency injection"""
        sig = inspect.signature(implementation_type.__init__)
        kwargs = {}

        for param_name, param in sig.parameters.items():
            if param_name == 'self':
                continue

            param_type = param.annotation
            if param_type != inspect.Parameter.empty and param_type in self._services:
                kwargs[param_name] = self.get(param_type)
            elif param_name == 'config':
                kwargs[param_name] = self._config
            elif param.default is inspect.Parameter.empty:
                log_with_context(self._logger, DEBUG, "Skipping unresolvable parameter",
                                 implementation=implementation_type.__name__,
                                 parameter=param_name,
                                 parameter_type=str(param_type))

        return implementation_type(**kwargs)

    def shutdown(self) -> None:
        for instance in self._instances.values():
            shutdown = getattr(instance, 'shutdown', None)
            if callable(shutdown):
                shutdown()
        self._instances.clear()
        log_with_context(self._logger, INFO, "Container shut down")
