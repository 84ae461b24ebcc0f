import restclient.integrations.xml

# Readers registered by default. Other integrations (e.g.
# restclient.integrations.json) register themselves when imported.
