"""JSON-RPC client, namespaces, transports and wire codec for Ethereum nodes."""