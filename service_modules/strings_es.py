# --- General ---
GREETING = "¡Bienvenido al servicio web respaldado por TLS!"

# --- Configuration Loading ---
LOG_DOTENV_LOADED = "Archivo .env cargado"
LOG_SETTINGS_LOADED = "Configuración cargada: host={host}, puerto={port}, client_cert_mode={mode}"
ERROR_INVALID_PORT = "PORT debe ser un entero entre 0 y 65535, se recibió '{value}'"
ERROR_INVALID_BOOLEAN = "{name} debe ser 'true' o 'false', se recibió '{value}'"
ERROR_INVALID_CLIENT_CERT_MODE = "CLIENT_CERT_MODE debe ser uno de {modes}, se recibió '{value}'"
ERROR_INVALID_LOG_LEVEL = "LOG_LEVEL debe ser uno de {levels}, se recibió '{value}'"
WARN_UNKNOWN_LANGUAGE = "SERVICE_LANGUAGE desconocido '{value}', se usa english"

# --- Credentials ---
LOG_CREDENTIAL_READ = "Cargado {kind} desde {path} ({size} bytes)"
WARN_CA_NOT_FOUND = "Certificado CA {path} no encontrado; se continúa sin ancla de confianza para clientes"
ERROR_CREDENTIAL_READ = "No se puede leer el archivo {kind} {path}: {error}"
ERROR_CREDENTIAL_INVALID = "{kind} no es material PEM/clave válido: {error}"

# --- TLS ---
ERROR_TLS_CERT_CHAIN = "La capa TLS rechazó el par certificado/clave: {error}"
ERROR_TLS_CA = "La capa TLS rechazó el certificado CA: {error}"
ERROR_TLS_MODE_WITHOUT_CA = "CLIENT_CERT_MODE '{mode}' necesita un certificado CA"
LOG_CLIENT_CERT_MODE = "Verificación de certificado de cliente: {mode}"

# --- Listener ---
LOG_SERVER_RUNNING = "El servidor está funcionando en {url}"
LOG_SERVER_STOPPING = "Deteniendo el servidor en {url}"
LOG_SERVER_STOPPED = "Servidor detenido."
ERROR_PORT_IN_USE = "El puerto {port} en {host} ya está en uso"
ERROR_PORT_PERMISSION = "Privilegios insuficientes para usar {host}:{port}"
ERROR_BIND_FAILED = "No se puede usar {host}:{port}: {error}"
ERROR_ALREADY_STARTED = "El servidor ya fue iniciado"

# --- Entry point ---
FATAL_CONFIGURATION = "FATAL: configuración inválida: {error}"
FATAL_CREDENTIALS = "FATAL: no se pudieron cargar las credenciales TLS: {error}"
FATAL_LISTENER = "FATAL: no se pudo iniciar el servidor HTTPS: {error}"
