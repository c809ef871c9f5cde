"""TypeGap TypeScript declaration and client stub generator."""

from .build import GENERATED_NOTICE as GENERATED_NOTICE
from .build import GeneratedOutput as GeneratedOutput
from .build import TypeGap as TypeGap
from .config import ConfigError as ConfigError
from .config import GeneratorConfig as GeneratorConfig
from .config import load_config as load_config
from .hubs import UnresolvableHubTypeError as UnresolvableHubTypeError
from .parser import Metadata as Metadata
from .parser import ValidationError as ValidationError
from .parser import parse as parse
from .translator import GenerationError as GenerationError
from .translator import NamingCollisionError as NamingCollisionError
from .translator import OutputModel as OutputModel
from .translator import Translator as Translator
from .types import *
