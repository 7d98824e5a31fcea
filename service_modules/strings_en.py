# --- General ---
GREETING = "Welcome to the TLS-backed web service!"

# --- Configuration Loading ---
LOG_DOTENV_LOADED = ".env file loaded"
LOG_SETTINGS_LOADED = "Settings loaded: host={host}, port={port}, client_cert_mode={mode}"
ERROR_INVALID_PORT = "PORT must be an integer between 0 and 65535, got '{value}'"
ERROR_INVALID_BOOLEAN = "{name} must be 'true' or 'false', got '{value}'"
ERROR_INVALID_CLIENT_CERT_MODE = "CLIENT_CERT_MODE must be one of {modes}, got '{value}'"
ERROR_INVALID_LOG_LEVEL = "LOG_LEVEL must be one of {levels}, got '{value}'"
WARN_UNKNOWN_LANGUAGE = "Unknown SERVICE_LANGUAGE '{value}', using english"

# --- Credentials ---
LOG_CREDENTIAL_READ = "Loaded {kind} from {path} ({size} bytes)"
WARN_CA_NOT_FOUND = "CA certificate {path} not found; continuing without a client trust anchor"
ERROR_CREDENTIAL_READ = "Cannot read {kind} file {path}: {error}"
ERROR_CREDENTIAL_INVALID = "{kind} is not valid PEM/key material: {error}"

# --- TLS ---
ERROR_TLS_CERT_CHAIN = "Certificate/key pair was rejected by the TLS layer: {error}"
ERROR_TLS_CA = "CA certificate was rejected by the TLS layer: {error}"
ERROR_TLS_MODE_WITHOUT_CA = "CLIENT_CERT_MODE '{mode}' needs a CA certificate"
LOG_CLIENT_CERT_MODE = "Client certificate verification: {mode}"

# --- Listener ---
LOG_SERVER_RUNNING = "Server is running at {url}"
LOG_SERVER_STOPPING = "Shutting down the listener on {url}"
LOG_SERVER_STOPPED = "Server stopped."
ERROR_PORT_IN_USE = "Port {port} on {host} is already in use"
ERROR_PORT_PERMISSION = "Insufficient privilege to bind {host}:{port}"
ERROR_BIND_FAILED = "Cannot bind {host}:{port}: {error}"
ERROR_ALREADY_STARTED = "Listener has already been started"

# --- Entry point ---
FATAL_CONFIGURATION = "FATAL: invalid configuration: {error}"
FATAL_CREDENTIALS = "FATAL: could not load TLS credentials: {error}"
FATAL_LISTENER = "FATAL: could not start the HTTPS listener: {error}"
