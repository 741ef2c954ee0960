from .shopping import main

raise SystemExit(main())
