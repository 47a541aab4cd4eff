
from clitree.app import (Application,
                         ParseResult,
                         Terminate)

from clitree.model import (Flag,
                           Argument,
                           Command)

from clitree.matcher import (ParseContext,
                             FlagMatch,
                             ArgumentMatch,
                             CommandMatch)

from clitree.errors import (CliTreeException,
                            GrammarError,
                            ArgumentParseError,
                            UnknownFlag,
                            MissingFlagArgument,
                            UnexpectedFlagArgument,
                            UnexpectedArgument,
                            InvalidSubcommand,
                            MissingRequired,
                            InvalidFlagArgument,
                            InvalidPositionalArgument,
                            InvalidDefault,
                            SubcommandRequired,
                            ValidationError)

from clitree.values import (Value,
                            ConvertedValue,
                            BoolValue,
                            StringValue,
                            IntValue,
                            FloatValue,
                            DurationValue,
                            EnumValue,
                            ListValue,
                            CumulativeValue,
                            StringMapValue)

from clitree.helpers import HelpHandler
from clitree.testing import TestClient
